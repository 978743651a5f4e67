"""Tenant settings document.

Settings are stored as one JSON document per tenant. New tenants start
from a fixed default document whose limits come from the plan; later
updates are merged into the stored document rather than replacing it.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from tenancy.domain.value_objects import PlanLimits, TenantPlan

DEFAULT_THEME = "default"


def default_settings(plan: TenantPlan) -> dict[str, Any]:
    """Build the settings document for a newly provisioned tenant."""
    return {
        "theme": DEFAULT_THEME,
        "integrations": {
            "bigwriter": False,
            "social_media": False,
            "newsletter": False,
            "analytics": False,
        },
        "features": {
            "comments": True,
            "social_sharing": True,
            "newsletter_signup": False,
            "search": True,
        },
        "limits": PlanLimits.for_plan(plan).as_dict(),
    }


def merge_settings(
    existing: Mapping[str, Any], patch: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge a settings patch into an existing settings document.

    Top-level keys from the patch overwrite existing ones. When both the
    existing and the patched value are mappings they are merged key by key,
    so nested keys absent from the patch are preserved. Neither input is
    mutated.
    """
    merged = copy.deepcopy(dict(existing))
    for key, value in patch.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = {**current, **copy.deepcopy(dict(value))}
        else:
            merged[key] = copy.deepcopy(value)
    return merged
