"""Concrete Governance Engine Service implementation."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from packages.decibel_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    meta_errors,
    success,
    validate_request,
)
from packages.decibel_shared.errors import codes, dependency_error, reject
from packages.decibel_shared.logging import fields, get_logger, public_api_instrumented
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import (
    LedgerCounter,
    LedgerStore,
    LedgerTransaction,
    LedgerUnitOfWork,
    transition_error,
)
from services.action.governance_engine.component import SERVICE_COMPONENT_ID
from services.action.governance_engine.config import GovernanceEngineSettings
from services.action.governance_engine.domain import (
    HealthStatus,
    Proposal,
    ProposalStatus,
    Vote,
    proposal_status,
)
from services.action.governance_engine.service import GovernanceEngineService
from services.action.governance_engine.validation import (
    CreateProposalRequest,
    ProposalIdRequest,
    VoteKeyRequest,
    VoteRequest,
)
from services.state.zone_registry.domain import MAX_DECIBEL, MIN_DECIBEL
from services.state.zone_registry.transitions import require_zone, set_max_decibel

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultGovernanceEngineService(GovernanceEngineService):
    """Default Governance Engine backed by the shared ledger store.

    Votes are immutable once written; the tally on the proposal only ever
    grows by one per distinct voter, and execution is a separate call made
    after the window closes.
    """

    def __init__(
        self,
        *,
        settings: GovernanceEngineSettings,
        store: LedgerStore,
        clock: BlockClock,
    ) -> None:
        self._settings = settings
        self._store = store
        self._uow = LedgerUnitOfWork(store)
        self._clock = clock

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id",),
    )
    def create_proposal(
        self,
        *,
        meta: EnvelopeMeta,
        title: str,
        description: str,
        zone_id: int,
        proposed_max_decibel: int,
    ) -> Envelope[int]:
        """Open a voting window of ``voting_period_blocks`` starting now."""
        request, errors = validate_request(
            meta=meta,
            model=CreateProposalRequest,
            payload={
                "title": title,
                "description": description,
                "zone_id": zone_id,
                "proposed_max_decibel": proposed_max_decibel,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _create(tx: LedgerTransaction) -> Proposal:
            require_zone(tx, request.zone_id)
            if not MIN_DECIBEL <= request.proposed_max_decibel <= MAX_DECIBEL:
                raise reject(
                    codes.INVALID_DECIBEL,
                    f"proposed ceiling must be within [{MIN_DECIBEL}, {MAX_DECIBEL}]",
                    metadata={"proposed_max_decibel": request.proposed_max_decibel},
                )
            proposal = Proposal(
                proposal_id=tx.next_id(LedgerCounter.PROPOSAL),
                title=request.title,
                description=request.description,
                zone_id=request.zone_id,
                proposed_max_decibel=request.proposed_max_decibel,
                proposer=meta.principal,
                start_block=now,
                end_block=now + self._settings.voting_period_blocks,
            )
            tx.put_proposal(proposal)
            return proposal

        result = self._transact(meta=meta, operation="create_proposal", fn=_create)
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        proposal = result.payload.value
        _LOGGER.info(
            "proposal created",
            extra={
                fields.BLOCK_HEIGHT: now,
                "proposal_id": proposal.proposal_id,
                "zone_id": proposal.zone_id,
                "end_block": proposal.end_block,
            },
        )
        return success(meta=meta, payload=proposal.proposal_id)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("proposal_id",),
    )
    def vote(
        self, *, meta: EnvelopeMeta, proposal_id: int, support: bool
    ) -> Envelope[Proposal]:
        """Record the caller's vote and bump the matching tally by one."""
        request, errors = validate_request(
            meta=meta,
            model=VoteRequest,
            payload={"proposal_id": proposal_id, "support": support},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _vote(tx: LedgerTransaction) -> Proposal:
            proposal = _require_proposal(tx, request.proposal_id)
            if now >= proposal.end_block:
                raise reject(
                    codes.VOTING_PERIOD_ACTIVE,
                    "voting must still be open",
                    metadata={
                        "proposal_id": proposal.proposal_id,
                        "end_block": proposal.end_block,
                    },
                )
            if tx.get_vote(proposal.proposal_id, meta.principal) is not None:
                raise reject(
                    codes.ALREADY_VOTED,
                    "caller has already voted on this proposal",
                    metadata={"proposal_id": proposal.proposal_id},
                )
            tx.put_vote(
                Vote(
                    proposal_id=proposal.proposal_id,
                    voter=meta.principal,
                    support=request.support,
                    block=now,
                )
            )
            if request.support:
                update = {"yes_votes": proposal.yes_votes + 1}
            else:
                update = {"no_votes": proposal.no_votes + 1}
            tallied = proposal.model_copy(update=update)
            tx.put_proposal(tallied)
            return tallied

        result = self._transact(meta=meta, operation="vote", fn=_vote)
        if result.ok:
            tallied = result.payload.value
            _LOGGER.info(
                "vote cast",
                extra={
                    fields.BLOCK_HEIGHT: now,
                    "proposal_id": tallied.proposal_id,
                    "yes_votes": tallied.yes_votes,
                    "no_votes": tallied.no_votes,
                },
            )
        return result

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("proposal_id",),
    )
    def execute_proposal(
        self, *, meta: EnvelopeMeta, proposal_id: int
    ) -> Envelope[Proposal]:
        """Apply a closed proposal that met quorum with a strict yes majority."""
        request, errors = validate_request(
            meta=meta, model=ProposalIdRequest, payload={"proposal_id": proposal_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()
        quorum = self._settings.quorum

        def _execute(tx: LedgerTransaction) -> Proposal:
            proposal = _require_proposal(tx, request.proposal_id)
            if now < proposal.end_block:
                raise reject(
                    codes.VOTING_PERIOD_ACTIVE,
                    "voting period has not ended",
                    metadata={
                        "proposal_id": proposal.proposal_id,
                        "end_block": proposal.end_block,
                    },
                )
            if proposal.executed:
                raise reject(
                    codes.ALREADY_EXISTS,
                    "proposal already executed",
                    metadata={"proposal_id": proposal.proposal_id},
                )
            if proposal.total_votes < quorum or proposal.yes_votes <= proposal.no_votes:
                raise reject(
                    codes.INVALID_VOTE,
                    "proposal did not pass",
                    metadata={
                        "proposal_id": proposal.proposal_id,
                        "yes_votes": proposal.yes_votes,
                        "no_votes": proposal.no_votes,
                        "quorum": quorum,
                    },
                )
            set_max_decibel(
                tx,
                zone_id=proposal.zone_id,
                max_decibel=proposal.proposed_max_decibel,
            )
            executed = proposal.model_copy(update={"executed": True})
            tx.put_proposal(executed)
            return executed

        result = self._transact(meta=meta, operation="execute_proposal", fn=_execute)
        if result.ok:
            executed = result.payload.value
            _LOGGER.info(
                "proposal executed",
                extra={
                    fields.BLOCK_HEIGHT: now,
                    "proposal_id": executed.proposal_id,
                    "zone_id": executed.zone_id,
                    "max_decibel": executed.proposed_max_decibel,
                },
            )
        return result

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("proposal_id",),
    )
    def get_proposal(
        self, *, meta: EnvelopeMeta, proposal_id: int
    ) -> Envelope[Proposal | None]:
        """Read one proposal."""
        request, errors = validate_request(
            meta=meta, model=ProposalIdRequest, payload={"proposal_id": proposal_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_proposal",
            fn=lambda tx: tx.get_proposal(request.proposal_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("proposal_id",),
    )
    def get_vote(
        self, *, meta: EnvelopeMeta, proposal_id: int, voter: str
    ) -> Envelope[Vote | None]:
        request, errors = validate_request(
            meta=meta,
            model=VoteKeyRequest,
            payload={"proposal_id": proposal_id, "voter": voter},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_vote",
            fn=lambda tx: tx.get_vote(request.proposal_id, request.voter),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("proposal_id",),
    )
    def get_proposal_status(
        self, *, meta: EnvelopeMeta, proposal_id: int
    ) -> Envelope[ProposalStatus | None]:
        request, errors = validate_request(
            meta=meta, model=ProposalIdRequest, payload={"proposal_id": proposal_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _status(tx: LedgerTransaction) -> ProposalStatus | None:
            proposal = tx.get_proposal(request.proposal_id)
            if proposal is None:
                return None
            return proposal_status(proposal, now=now)

        return self._transact(meta=meta, operation="get_proposal_status", fn=_status)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of the ledger store backing proposals."""
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        result = self._transact(
            meta=meta,
            operation="health",
            fn=lambda tx: tx.last_id(LedgerCounter.PROPOSAL),
        )
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        store_ready = self._store.is_healthy()
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                store_ready=store_ready,
                store_backend=self._store.backend,
                proposal_count=result.payload.value,
                detail="ok" if store_ready else "ledger store unavailable",
            ),
        )

    def _transact(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        fn: Callable[[LedgerTransaction], T],
    ) -> Envelope[T]:
        """Run one transition and map its failure into envelope errors."""
        try:
            payload = self._uow.run(fn)
        except Exception as exc:  # noqa: BLE001
            error = transition_error(exc)
            if error is None:
                return self._dependency_failure(meta=meta, operation=operation, exc=exc)
            return failure(meta=meta, errors=[error])
        return success(meta=meta, payload=payload)

    def _dependency_failure(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
    ) -> Envelope[Any]:
        """Map one dependency/runtime exception into structured envelope errors."""
        _LOGGER.warning(
            "%s failed due to dependency error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(
            meta=meta,
            errors=[
                dependency_error(
                    f"{operation} failed",
                    code=codes.DEPENDENCY_FAILURE,
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )


def _require_proposal(tx: LedgerTransaction, proposal_id: int) -> Proposal:
    proposal = tx.get_proposal(proposal_id)
    if proposal is None:
        raise reject(
            codes.NOT_FOUND,
            "proposal not found",
            metadata={"proposal_id": proposal_id},
        )
    return proposal
