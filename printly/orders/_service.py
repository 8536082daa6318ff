"""
Order lifecycle — creation, status changes, cancellation and removal.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from kungfu import Result, Ok, Error

from printly import machine as M
from printly import pickup as P
from printly import saga as S
from printly._errors import from_store
from printly._types import ErrorKind, Errors, PrintlyError
from printly.config import Settings
from printly.domain import (
    MAX_COPIES,
    MIN_COPIES,
    MIN_DOCUMENT_SIZE,
    Actor,
    CenterStatus,
    Document,
    Order,
    OrderStatus,
    PrintCenter,
    PrintMode,
)
from printly.ingest import DocumentIngestion
from printly.orders._request import DocumentRequest
from printly.pricing import estimate_order_cost
from printly.storage import BlobStore
from printly.store import CenterLookup, OrderStore, StoreError, StoreErrorKind

logger = logging.getLogger(__name__)

# Failures inside the local write that keep their kind for the caller.
_LOCAL_KINDS = frozenset({ErrorKind.RESOURCE_EXHAUSTED})


class OrderService:
    """
    Example:
        service = OrderService(orders, centers, blobs, Settings())

        match await service.create_order("uid-1", center_id, [DocumentRequest(upload)]):
            case Ok(order):
                print(order.code, order.total_cost)
            case Error(e):
                print(e.kind.code, e)
    """

    def __init__(
        self,
        orders: OrderStore,
        centers: CenterLookup,
        blobs: BlobStore,
        settings: Settings,
        *,
        on_orphan: S.OrphanHook = S.log_orphans,
    ) -> None:
        self._orders = orders
        self._centers = centers
        self._ingestion = DocumentIngestion(blobs, on_orphan=on_orphan)
        self._on_orphan = on_orphan

        self._policy = settings.code_policy()
        self._rates = settings.rates()
        self._currency = settings.currency
        self._max_document_size = settings.max_document_size

    # ═══════════════════════════════════════════════════════════════════════════
    # Creation
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_order(
        self,
        user_uid: str,
        center_id: int,
        requests: Sequence[DocumentRequest],
        print_mode: PrintMode = PrintMode.PRE_PRINT,
    ) -> Result[Order, PrintlyError]:
        """
        Validate, price, stage documents and persist a new order.

        The order starts in PENDING_PAYMENT with a fresh pickup code. Staged
        files are removed again if the order cannot be stored.
        """
        match self._validate(requests):
            case Error(e):
                return Error(e)
            case Ok(sizes):
                pass

        match await self._operational_center(center_id):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await P.generate(self._code_exists, self._policy):
            case Error(e):
                return Error(e)
            case Ok(code):
                pass

        documents = tuple(
            Document(
                file_name=r.file_name,
                mime_type=r.mime_type,
                size=size,
                print_options=r.print_options,
            )
            for r, size in zip(requests, sizes, strict=True)
        )
        now = datetime.now()
        order = Order(
            code=code,
            user_uid=user_uid,
            center_id=center_id,
            status=OrderStatus.PENDING_PAYMENT,
            print_mode=print_mode,
            total_cost=estimate_order_cost(documents, self._rates),
            currency=self._currency,
            created_at=now,
            updated_at=now,
            created_by=user_uid,
            updated_by=user_uid,
            documents=documents,
        )

        uploads = [r.upload for r in requests]
        match await self._ingestion.ingest(order, uploads, self._save_with_code_retry):
            case Ok(saved):
                logger.info(
                    "created order %s (%s) for %s at center %s, %d documents, cost %d %s",
                    saved.id, saved.code, user_uid, center_id,
                    len(saved.documents), saved.total_cost, saved.currency,
                )
                return Ok(saved)
            case Error(e):
                return Error(e.surface(local=_LOCAL_KINDS))

    def _validate(self, requests: Sequence[DocumentRequest]) -> Result[tuple[int, ...], PrintlyError]:
        if not requests:
            return Error(Errors.invalid_argument("an order needs at least one document"))

        sizes: list[int] = []
        for i, r in enumerate(requests):
            if not r.file_name or not r.mime_type:
                return Error(Errors.invalid_argument(f"document {i}: file name and mime type are required"))
            try:
                size = r.upload.size
            except OSError as e:
                return Error(PrintlyError(
                    ErrorKind.INVALID_ARGUMENT,
                    f"document {i}: cannot read {r.file_name}",
                    e,
                ))
            if not MIN_DOCUMENT_SIZE <= size <= self._max_document_size:
                return Error(Errors.invalid_argument(
                    f"document {i}: size {size} outside {MIN_DOCUMENT_SIZE}..{self._max_document_size}",
                ))
            if not MIN_COPIES <= r.print_options.copies <= MAX_COPIES:
                return Error(Errors.invalid_argument(
                    f"document {i}: copies must be in {MIN_COPIES}..{MAX_COPIES}",
                ))
            if not r.print_options.pages.strip():
                return Error(Errors.invalid_argument(f"document {i}: pages must not be empty"))
            sizes.append(size)

        return Ok(tuple(sizes))

    async def _operational_center(self, center_id: int) -> Result[PrintCenter, PrintlyError]:
        match await self._centers.find_by_id(center_id):
            case Ok(None):
                return Error(Errors.not_found("print center", center_id))
            case Ok(center) if center.status is not CenterStatus.APPROVED:
                return Error(Errors.precondition(
                    f"print center {center_id} is {center.status.value}, not accepting orders",
                ))
            case Ok(center):
                return Ok(center)
            case Error(e):
                return Error(from_store(e, "print center", center_id))

    async def _code_exists(self, code: str) -> Result[bool, StoreError]:
        return (await self._orders.find_by_code(code)).map(lambda o: o is not None)

    async def _save_with_code_retry(self, order: Order) -> Result[Order, PrintlyError]:
        """
        Insert the order; on a unique-code violation draw a new code and retry.

        The generator's pre-check cannot see concurrent inserts, so the store's
        constraint decides. Bounded by the same max_attempts as generation.
        """
        candidate = order
        for attempt in range(1, self._policy.max_attempts + 1):
            match await self._orders.save(candidate):
                case Ok(saved):
                    return Ok(saved)
                case Error(StoreError(kind=StoreErrorKind.DUPLICATE)):
                    logger.warning(
                        "pickup code %s taken at insert (attempt %d), regenerating",
                        candidate.code, attempt,
                    )
                case Error(e):
                    return Error(Errors.internal(f"failed to save order {candidate.code}", e))

            if attempt == self._policy.max_attempts:
                break

            match await P.generate(self._code_exists, self._policy):
                case Ok(code):
                    candidate = candidate.with_changes(code=code)
                case Error(e):
                    return Error(e)

        return Error(PrintlyError(
            ErrorKind.RESOURCE_EXHAUSTED,
            f"pickup code collided on insert {self._policy.max_attempts} times",
        ))

    # ═══════════════════════════════════════════════════════════════════════════
    # Status
    # ═══════════════════════════════════════════════════════════════════════════

    async def update_order_status(
        self,
        order_id: int,
        target: OrderStatus,
        actor: Actor,
    ) -> Result[Order, PrintlyError]:
        match await self.get_order(order_id):
            case Ok(order):
                return await self._move(order, target, actor)
            case Error(e):
                return Error(e)

    async def cancel_order(self, order_id: int, actor: Actor) -> Result[Order, PrintlyError]:
        """Owner or a privileged role only, and only before payment."""
        match await self.get_order(order_id):
            case Error(e):
                return Error(e)
            case Ok(order) if not (order.owned_by(actor.uid) or actor.privileged):
                return Error(Errors.unauthorized(f"{actor.uid} may not cancel order {order_id}"))
            case Ok(order) if not M.can_cancel(order):
                return Error(Errors.precondition(
                    f"order {order_id} is {order.status.value} and can no longer be cancelled",
                ))
            case Ok(order):
                return await self._move(order, OrderStatus.CANCELLED, actor)

    async def _move(self, order: Order, target: OrderStatus, actor: Actor) -> Result[Order, PrintlyError]:
        match M.transition(order, target):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        if order.id is None:
            return Error(Errors.internal(f"order {order.code} has not been stored"))

        now = datetime.now()
        fields: dict[str, object] = {"status": target, "updated_by": actor.uid, "updated_at": now}
        if target is OrderStatus.CANCELLED:
            fields["cancelled_at"] = now
        elif target is OrderStatus.PAID:
            fields["paid_at"] = now

        match await self._orders.update(order.id, fields, expected_status=order.status):
            case Ok(updated):
                logger.info(
                    "order %s: %s -> %s by %s",
                    order.id, order.status.value, target.value, actor.uid,
                )
                return Ok(updated)
            case Error(e):
                return Error(from_store(e, "order", order.id))

    # ═══════════════════════════════════════════════════════════════════════════
    # Removal
    # ═══════════════════════════════════════════════════════════════════════════

    async def delete_order(self, order_id: int) -> Result[Order, PrintlyError]:
        """
        Hard delete the order and its documents, then remove the stored files.

        File removal is best-effort: failures are logged and reported to the
        reconciliation hook, the deletion itself still succeeds.
        """
        match await self._orders.delete(order_id):
            case Error(e):
                return Error(from_store(e, "order", order_id))
            case Ok(removed):
                pass

        paths = removed.storage_paths
        if paths:
            name = f"delete order {order_id}"
            report = await S.compensate_all(paths, self._ingestion.blobs.delete, name=name)
            S.report_orphans(name, report, self._on_orphan)

        logger.info("deleted order %s (%s), %d files", order_id, removed.code, len(paths))
        return Ok(removed)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_order(self, order_id: int) -> Result[Order, PrintlyError]:
        match await self._orders.find_by_id(order_id):
            case Ok(None):
                return Error(Errors.not_found("order", order_id))
            case Ok(order):
                return Ok(order)
            case Error(e):
                return Error(from_store(e, "order", order_id))

    async def get_order_by_code(self, code: str) -> Result[Order, PrintlyError]:
        match await self._orders.find_by_code(code):
            case Ok(None):
                return Error(Errors.not_found("order with code", code))
            case Ok(order):
                return Ok(order)
            case Error(e):
                return Error(from_store(e, "order with code", code))

    async def list_orders(self) -> Result[list[Order], PrintlyError]:
        return (await self._orders.find_all()).map_err(lambda e: from_store(e, "orders", "*"))

    async def list_orders_for_center(self, center_id: int) -> Result[list[Order], PrintlyError]:
        return (await self._orders.find_by_center(center_id)).map_err(
            lambda e: from_store(e, "orders of center", center_id)
        )

    async def list_orders_for_user(self, user_uid: str) -> Result[list[Order], PrintlyError]:
        return (await self._orders.find_by_user(user_uid)).map_err(
            lambda e: from_store(e, "orders of user", user_uid)
        )

    async def list_orders_by_status(self, status: OrderStatus) -> Result[list[Order], PrintlyError]:
        return (await self._orders.find_by_status(status)).map_err(
            lambda e: from_store(e, "orders with status", status.value)
        )


__all__ = ("OrderService",)
