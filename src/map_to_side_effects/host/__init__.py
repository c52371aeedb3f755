"""Host editor adapters: rendering, Neovim over RPC, and an in-memory editor."""

from .base import MappingHost
from .vimscript import VimscriptRenderer, autoload_call, vim_string
from .simulated import Change, ForeignMapping, SimulatedEditor
from .nvim import NvimHost

__all__ = [
    "MappingHost",
    "VimscriptRenderer",
    "autoload_call",
    "vim_string",
    "Change",
    "ForeignMapping",
    "SimulatedEditor",
    "NvimHost",
]
