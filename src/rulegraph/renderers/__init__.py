"""Human-readable renderings of rule chains."""

from .console import Verbosity, render_rule_chain

__all__ = ["Verbosity", "render_rule_chain"]
