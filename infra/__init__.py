"""
Infrastructure module exports.

Bootstrap for the model backend, WhatsApp client and relay.
"""

from .bootstrap import InfraBootstrap, bootstrap_infrastructure, create_llm_backend

__all__ = [
    "InfraBootstrap",
    "bootstrap_infrastructure",
    "create_llm_backend",
]
