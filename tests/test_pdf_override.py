import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import pytest
from export.pdf_export import build_email_body, build_quote_pdf


CRITICAL = [{"code": "NO_APPLICABLE_PRODUCT", "severity": "critical", "message": "No product can lend."}]


def test_requires_override_with_critical():
    data = {"warnings": CRITICAL}
    with pytest.raises(ValueError):
        build_quote_pdf(data)
    with pytest.raises(ValueError):
        build_email_body(data)


def test_override_included():
    data = {
        "warnings": CRITICAL,
        "override_reason": "Underwriter approved exception",
        "deal_snapshot": {"Property Value": "£350,000"},
    }
    body = build_email_body(data)
    assert "Override Reason: Underwriter approved exception" in body
    assert "Property Value: £350,000" in body


def test_pdf_bytes():
    data = {
        "branding": {"title": "Buy-to-Let Quote", "broker": "Acme Brokers"},
        "deal_snapshot": {"Property Value": "£350,000"},
        "matrix": [["", "6%"], ["Gross loan", "£262,500"]],
        "best": {"Net loan": "£246,750"},
    }
    out = build_quote_pdf(data)
    assert out.startswith(b"%PDF")
