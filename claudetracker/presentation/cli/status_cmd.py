"""Status and history commands."""

from __future__ import annotations

import json

import click

from ...constants import console
from ...infrastructure.factory import ServiceFactory
from ..renderers import history_to_json, render_history_table, render_status_panel, status_to_json


@click.command(name="status")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def status(factory: ServiceFactory, output_json: bool):
   """Show the active session and this month's usage."""
   factory.acquire_lock()
   engine = factory.get_engine()
   # Catch up on an expiry that happened while nothing was running.
   engine.tick()

   stats = engine.stats
   now = factory.clock.now()

   if output_json:
      print(json.dumps(status_to_json(stats, now), indent=2))
      return

   console.print(render_status_panel(stats, now))


@click.command(name="history")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def history(factory: ServiceFactory, output_json: bool):
   """List this month's sessions."""
   factory.acquire_lock()
   engine = factory.get_engine()
   engine.tick()

   stats = engine.stats
   now = factory.clock.now()

   if output_json:
      print(json.dumps(history_to_json(stats, now), indent=2))
      return

   if not stats.sessions:
      console.print(f"[yellow]No sessions recorded for {stats.year_month}[/yellow]")
      return

   console.print(render_history_table(stats, now))
