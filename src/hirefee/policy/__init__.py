"""Deployment policy — per-role commission bounds loaded from config/."""

from hirefee.policy.resolver import PolicyError, PolicyResolver

__all__ = ["PolicyError", "PolicyResolver"]
