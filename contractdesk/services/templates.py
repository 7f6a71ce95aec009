"""Template plan resolver: which Google Docs templates to render, in merge order."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from contractdesk.core.config import TemplateIds

logger = logging.getLogger(__name__)

# Contract type labels as stored on contracts
ADJUSTER_LABEL = "손해사정사"
ADMIN_LABEL = "행정사"
COMBINED_LABEL = "손해사정사+행정사"

KIND_ADJUSTER = "adjuster"
KIND_ADMIN = "admin"
KIND_COMBINED = "combined"
KIND_FALLBACK = "fallback"


@dataclass(frozen=True)
class TemplatePlanEntry:
    kind: str
    template_id: str


def resolve_template_plan(contract_type: str | None, templates: TemplateIds) -> list[TemplatePlanEntry]:
    """Return the ordered templates for *contract_type*; ``[]`` when nothing usable is configured.

    A combined contract prefers one dedicated combined template and otherwise
    renders the adjuster and admin templates separately (to be merged in that
    order). Unrecognized types fall back to the first configured template of
    combined, adjuster, admin.
    """
    contract_type = contract_type or ""

    if contract_type == ADJUSTER_LABEL:
        return [TemplatePlanEntry(KIND_ADJUSTER, templates.adjuster)] if templates.adjuster else []

    if contract_type == ADMIN_LABEL:
        return [TemplatePlanEntry(KIND_ADMIN, templates.admin)] if templates.admin else []

    if contract_type == COMBINED_LABEL:
        combined = templates.combined
        if combined and combined != templates.adjuster and combined != templates.admin:
            return [TemplatePlanEntry(KIND_COMBINED, combined)]
        plan = []
        if templates.adjuster:
            plan.append(TemplatePlanEntry(KIND_ADJUSTER, templates.adjuster))
        if templates.admin:
            plan.append(TemplatePlanEntry(KIND_ADMIN, templates.admin))
        return plan

    fallback = templates.combined or templates.adjuster or templates.admin
    if not fallback:
        return []
    logger.warning("Unrecognized contract type %r; using fallback template %s", contract_type, fallback)
    return [TemplatePlanEntry(KIND_FALLBACK, fallback)]
