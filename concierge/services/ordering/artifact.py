"""Canonical order artifact stored in order metadata."""
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from concierge.services.ordering.exceptions import ArtifactStatusError
from concierge.services.ordering.models import (
    CANONICAL_COMPILER_VERSION,
    CanonicalBotOrderItem,
    CanonicalOrderArtifact,
    CompiledOrderItem,
    CompiledOrderResult,
    CompileStatus,
)

logger = logging.getLogger(__name__)

METADATA_KEY = "canonicalOrder"


def build_canonical_order_artifact(
    items: Sequence[CompiledOrderItem], subtotal: float
) -> CanonicalOrderArtifact:
    """Freeze compiled items into a versioned artifact."""
    return CanonicalOrderArtifact(
        compiler_version=CANONICAL_COMPILER_VERSION,
        compiled_at=datetime.now(timezone.utc).isoformat(),
        status=CompileStatus.READY_TO_EXECUTE.value,
        subtotal=subtotal,
        item_count=len(items),
        items=[item.model_copy(deep=True) for item in items],
    )


def freeze_compiled_order(result: CompiledOrderResult) -> CanonicalOrderArtifact:
    """Build the artifact for a compile result; only ready results qualify."""
    if result.status != CompileStatus.READY_TO_EXECUTE:
        raise ArtifactStatusError(
            f"Cannot freeze an order with status {result.status}"
        )
    return build_canonical_order_artifact(result.items, result.subtotal)


def attach_canonical_order(
    metadata: Optional[Mapping], artifact: CanonicalOrderArtifact
) -> Dict[str, Any]:
    """Return a copy of ``metadata`` carrying the artifact's JSON form."""
    updated = dict(metadata or {})
    updated[METADATA_KEY] = artifact.model_dump(mode="json")
    return updated


def extract_canonical_order_artifact(metadata: Any) -> Optional[CanonicalOrderArtifact]:
    """
    Read the canonical artifact back out of untrusted order metadata.

    Validation is strict: camelCase keys only, no type coercion, literal
    status and compiler version. Anything else yields None.
    """
    if not isinstance(metadata, Mapping):
        return None

    raw = metadata.get(METADATA_KEY)
    if raw is None:
        return None

    try:
        return CanonicalOrderArtifact.model_validate(
            raw, strict=True, by_alias=True, by_name=False
        )
    except ValidationError as e:
        logger.warning(
            f"[ARTIFACT] Ignoring malformed canonical order - {e.error_count()} validation errors"
        )
        return None


def extract_canonical_bot_items(metadata: Any) -> Optional[List[CanonicalBotOrderItem]]:
    """Project the canonical artifact to the items bot automation places."""
    artifact = extract_canonical_order_artifact(metadata)
    if artifact is None:
        return None

    return [
        CanonicalBotOrderItem(
            item_name=item.item_name,
            quantity=item.quantity,
            modifier_details=[group.model_copy(deep=True) for group in item.modifier_details],
        )
        for item in artifact.items
    ]
