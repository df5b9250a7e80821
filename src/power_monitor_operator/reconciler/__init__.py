"""Reconciler variants and the runner that sequences them."""

from .base import Action, ErrorPolicy, Reconciler, Result
from .deleter import Deleter
from .finalizer import Finalizer
from .runner import Runner, RunResult
from .updater import Updater

__all__ = [
    "Action",
    "ErrorPolicy",
    "Reconciler",
    "Result",
    "Updater",
    "Deleter",
    "Finalizer",
    "Runner",
    "RunResult",
]
