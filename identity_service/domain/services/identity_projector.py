"""Reduce a resolved cluster into the consolidated identity view."""

import logging

from identity_service.core.exceptions import InvariantViolation
from identity_service.domain.models.identity import ClusterResult, IdentityView

logger = logging.getLogger(__name__)


def _dedupe(values: list[str | None]) -> list[str]:
    """Drop absent values and repeats, keeping first occurrence order."""
    seen: dict[str, None] = {}
    for value in values:
        if value is not None and value != "":
            seen.setdefault(value, None)
    return list(seen)


def _check_cluster(cluster: ClusterResult) -> None:
    primary = cluster.primary
    if primary is None or not primary.is_primary:
        logger.critical(
            "Cluster has no primary contact",
            extra={"contact_ids": [c.id for c in cluster.secondaries]},
        )
        raise InvariantViolation("cluster has no primary contact")

    for contact in cluster.secondaries:
        if contact.is_primary or not contact.is_active or contact.linked_id != primary.id:
            logger.critical(
                "Secondary contact not linked to cluster primary",
                extra={
                    "contact_id": contact.id,
                    "linked_id": contact.linked_id,
                    "primary_id": primary.id,
                },
            )
            raise InvariantViolation(
                f"contact {contact.id} is not a secondary of primary {primary.id}"
            )


def project(cluster: ClusterResult) -> IdentityView:
    """Build the identity view for a cluster.

    Emails and phone numbers are deduplicated with the primary's values
    first, then the secondaries' in creation order. No I/O.

    Args:
        cluster: Resolved cluster

    Returns:
        IdentityView

    Raises:
        InvariantViolation: If the cluster has no primary or a dangling secondary
    """
    _check_cluster(cluster)
    records = cluster.records

    return IdentityView(
        primary_id=cluster.primary.id,
        emails=_dedupe([c.email for c in records]),
        phone_numbers=_dedupe([c.phone_number for c in records]),
        secondary_ids=[c.id for c in cluster.secondaries],
    )
