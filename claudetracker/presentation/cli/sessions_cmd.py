"""Session management commands."""

from __future__ import annotations

import sys
import threading

import click
from rich.live import Live

from ...constants import console
from ...core.errors import NoActiveSession, TrackerError
from ...infrastructure.factory import ServiceFactory
from ...utils import format_duration
from ..renderers import render_status_panel


@click.command(name="start")
@click.pass_obj
def start(factory: ServiceFactory):
   """Start a new Claude session."""
   factory.acquire_lock()
   engine = factory.get_engine()
   engine.tick()

   try:
      engine.start_session()
   except TrackerError as exc:
      console.print(f"[red]Error: {exc}[/red]")
      sys.exit(1)

   console.print("[green]✓ Session started[/green]")
   console.print(render_status_panel(engine.stats, factory.clock.now()))


@click.command(name="stop")
@click.pass_obj
def stop(factory: ServiceFactory):
   """Stop the active Claude session."""
   factory.acquire_lock()
   engine = factory.get_engine()
   engine.tick()

   try:
      session = engine.stop_session()
   except TrackerError as exc:
      console.print(f"[red]Error: {exc}[/red]")
      sys.exit(1)

   duration = format_duration(session.duration(factory.clock.now()))
   console.print(f"[green]✓ Session stopped after {duration}[/green]")
   console.print(f"[dim]Remaining this month: {engine.remaining_sessions}[/dim]")


@click.command(name="watch")
@click.option("--stop-on-exit", is_flag=True, help="Stop the session when interrupted with Ctrl-C")
@click.pass_obj
def watch(factory: ServiceFactory, stop_on_exit: bool):
   """Show a live countdown for the active session until it ends."""
   factory.acquire_lock()
   engine = factory.get_engine()
   engine.tick()

   if engine.active_session is None:
      console.print("[yellow]No active session to watch[/yellow]")
      return

   changed = threading.Event()
   unsubscribe = engine.subscribe(changed.set)
   try:
      with Live(render_status_panel(engine.stats, factory.clock.now()), console=console, transient=False) as live:
         while True:
            changed.wait(timeout=1.0)
            changed.clear()
            stats = engine.stats
            live.update(render_status_panel(stats, factory.clock.now()))
            if stats.active_session is None:
               break
      console.print("[yellow]Session ended[/yellow]")
   except KeyboardInterrupt:
      if stop_on_exit:
         try:
            session = engine.stop_session()
            duration = format_duration(session.duration(factory.clock.now()))
            console.print(f"[green]✓ Session stopped after {duration}[/green]")
         except NoActiveSession:
            pass
      else:
         console.print("[dim]Stopped watching; session is still active[/dim]")
   finally:
      unsubscribe()
