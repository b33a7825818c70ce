from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from conftest import make_order
from fitstore.errors import EntitlementDenied, FileMissing
from fitstore.models.download import DenialReason
from fitstore.services.download_service import DownloadService

PDF_BYTES = b"%PDF-1.4 test"


def build_service(order, file_result=PDF_BYTES, claimed="auto"):
    entitlements = AsyncMock()
    if claimed == "auto":
        claimed = order.model_copy(update={"download_count": order.download_count + 1}) if order else None
    entitlements.claim_download.return_value = claimed
    entitlements.denial_reason.return_value = DenialReason.LIMIT_EXCEEDED

    files = AsyncMock()
    if isinstance(file_result, Exception):
        files.read_file.side_effect = file_result
    else:
        files.read_file.return_value = file_result

    audit = AsyncMock()
    service = DownloadService(AsyncMock(), entitlements, files, audit)
    service._get_order_file = AsyncMock(
        return_value=(order, "strength.pdf", "strength-program.pdf") if order else None
    )
    return service, entitlements, files, audit


@pytest.mark.asyncio
async def test_successful_download_claims_and_audits():
    order = make_order(download_count=2)
    service, entitlements, files, audit = build_service(order)

    result = await service.download(str(order.id), "203.0.113.7", "curl/8.0")

    assert result.content == PDF_BYTES
    assert result.file_name == "strength-program.pdf"
    assert result.content_type == "application/pdf"
    assert result.download_count == 3
    files.read_file.assert_awaited_once_with("strength.pdf")
    entitlements.claim_download.assert_awaited_once()
    audit.record.assert_awaited_once_with(order.id, "203.0.113.7", "curl/8.0")


@pytest.mark.asyncio
async def test_unknown_order_is_denied_without_side_effects():
    service, entitlements, files, audit = build_service(None)

    with pytest.raises(EntitlementDenied) as exc:
        await service.download("not-a-uuid", "203.0.113.7", "curl/8.0")

    assert exc.value.reason == DenialReason.ORDER_NOT_COMPLETED
    files.read_file.assert_not_awaited()
    entitlements.claim_download.assert_not_awaited()
    audit.record.assert_not_awaited()


@pytest.mark.asyncio
async def test_expired_order_is_denied_before_reading_file():
    order = make_order()
    service, entitlements, files, audit = build_service(order)

    with pytest.raises(EntitlementDenied) as exc:
        await service.download(order.id, "ip", "ua", now=order.expires_at + timedelta(seconds=1))

    assert exc.value.reason == DenialReason.EXPIRED
    files.read_file.assert_not_awaited()
    entitlements.claim_download.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_file_does_not_spend_a_download():
    order = make_order()
    service, entitlements, files, audit = build_service(order, file_result=FileMissing())

    with pytest.raises(FileMissing):
        await service.download(order.id, "ip", "ua")

    entitlements.claim_download.assert_not_awaited()
    audit.record.assert_not_awaited()


@pytest.mark.asyncio
async def test_lost_claim_reports_fresh_reason():
    order = make_order(download_count=4)
    service, entitlements, files, audit = build_service(order, claimed=None)

    with pytest.raises(EntitlementDenied) as exc:
        await service.download(order.id, "ip", "ua")

    assert exc.value.reason == DenialReason.LIMIT_EXCEEDED
    entitlements.denial_reason.assert_awaited_once()
    audit.record.assert_not_awaited()


