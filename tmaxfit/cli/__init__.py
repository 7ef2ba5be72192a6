"""
Command Line Interface for tmaxfit
==================================

Usage:
    tmaxfit station.csv --seed 42 --chains 2
    tmaxfit - < data.txt
"""

from tmaxfit.cli.args_parser import create_parser, validate_args
from tmaxfit.cli.commands import dispatch_command
from tmaxfit.cli.main import main

__all__ = [
    "main",
    "create_parser",
    "dispatch_command",
    "validate_args",
]
