"""Monthly Claude session quota tracker."""

__version__ = "0.1.0"
