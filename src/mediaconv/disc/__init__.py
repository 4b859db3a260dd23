"""Optical disc ripping through MakeMKV's makemkvcon."""

from .core import makemkvcon_binary, parse_robot_line, rip_cmd, rip_disc
from .batch import RipRequest, next_disc_folder, rip_discs, rip_one

__all__ = [
    "makemkvcon_binary",
    "parse_robot_line",
    "rip_cmd",
    "rip_disc",
    "RipRequest",
    "next_disc_folder",
    "rip_discs",
    "rip_one",
]
