from .cycle_md import render_cycle_md
from .schedule_md import render_schedule_md

__all__ = ["render_cycle_md", "render_schedule_md"]
