"""Inference engine and model installation."""

from .installer import DependencyInstaller
from .state_machine import decide
from . import layout

__all__ = [
    'DependencyInstaller',
    'decide',
    'layout'
]
