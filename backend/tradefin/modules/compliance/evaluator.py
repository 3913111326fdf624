"""Compliance checks over an instrument, its documents and its latest risk score.

Each check appends remarks and returns a pass flag; ``evaluate`` ANDs them in a
fixed order. The functions are pure so the persistence layer only has to load
inputs and store the verdict.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Sequence

from tradefin.modules.guarantees.models import BankGuarantee
from tradefin.modules.letters_of_credit.models import LetterOfCredit

HIGH_RISK_THRESHOLD = Decimal("70")
MODERATE_RISK_THRESHOLD = Decimal("50")

UNKNOWN_COUNTRY = "Unknown"

NOT_FOUND = "Transaction not found."
NO_DOCUMENTS = "No trade documents found for this transaction."
ALL_PASSED = "All compliance checks passed successfully."
ALL_PASSED_SUFFIX = " All checks passed."


@dataclass
class ComplianceResult:
    instrument_valid: bool = False
    documents_validated: bool = False
    risk_check_passed: bool = False
    country_check_passed: bool = False
    remarks: list[str] = field(default_factory=list)

    @property
    def compliant(self) -> bool:
        return self.instrument_valid and self.documents_validated and self.risk_check_passed and self.country_check_passed

    def remarks_text(self) -> str:
        text = " ".join(self.remarks)
        if not self.compliant:
            return text
        return text + ALL_PASSED_SUFFIX if text else ALL_PASSED


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _invalid_amount(amount: Decimal | None) -> bool:
    return amount is None or amount <= 0


def check_letter_of_credit(lc: LetterOfCredit, remarks: list[str], *, today: dt.date) -> bool:
    ok = True
    if lc.expiry_date is not None and lc.expiry_date < today:
        remarks.append("LC has expired.")
        ok = False
    if _invalid_amount(lc.amount):
        remarks.append("Invalid LC amount.")
        ok = False
    if _blank(lc.beneficiary_name):
        remarks.append("Beneficiary name is missing.")
        ok = False
    return ok


def check_guarantee(bg: BankGuarantee, remarks: list[str], *, today: dt.date) -> bool:
    ok = True
    if bg.validity_period is not None and bg.validity_period < today:
        remarks.append("Guarantee validity period has expired.")
        ok = False
    if _invalid_amount(bg.amount):
        remarks.append("Invalid guarantee amount.")
        ok = False
    if _blank(bg.beneficiary_name):
        remarks.append("Beneficiary name is missing.")
        ok = False
    return ok


def check_documents(document_types: Sequence[str], remarks: list[str]) -> bool:
    if not document_types:
        remarks.append(NO_DOCUMENTS)
        return False

    types = [t.upper() for t in document_types]
    if not any("INVOICE" in t for t in types):
        remarks.append("Invoice document is missing.")
        return False
    if not any("BILL OF LADING" in t or "BOL" in t for t in types):
        remarks.append("Bill of Lading is missing.")
        return False

    remarks.append("Required documents present.")
    return True


def check_risk(score: Decimal | None, remarks: list[str], *, assessed: bool) -> bool:
    if not assessed:
        remarks.append("No risk assessment found.")
        return True
    if score is None:
        return True
    if score > HIGH_RISK_THRESHOLD:
        remarks.append(f"High risk score detected ({score}). Requires escalation.")
        return False
    if score > MODERATE_RISK_THRESHOLD:
        remarks.append(f"Moderate risk detected ({score}).")
    return True


def resolve_country(instrument: LetterOfCredit | BankGuarantee) -> str:
    # Instruments carry no country field yet; every instrument resolves to the placeholder.
    return UNKNOWN_COUNTRY


def check_country(country: str | None, restricted: Iterable[str], remarks: list[str]) -> bool:
    if country is not None:
        upper = country.upper()
        if any(r.upper() in upper for r in restricted):
            remarks.append("Beneficiary country is in restricted list.")
            return False
    remarks.append("Country check passed.")
    return True


def evaluate(
    instrument: LetterOfCredit | BankGuarantee,
    *,
    document_types: Sequence[str],
    risk_score: Decimal | None,
    risk_assessed: bool,
    restricted_countries: Iterable[str],
    today: dt.date,
) -> ComplianceResult:
    result = ComplianceResult()
    if isinstance(instrument, LetterOfCredit):
        result.instrument_valid = check_letter_of_credit(instrument, result.remarks, today=today)
    else:
        result.instrument_valid = check_guarantee(instrument, result.remarks, today=today)
    result.documents_validated = check_documents(document_types, result.remarks)
    result.risk_check_passed = check_risk(risk_score, result.remarks, assessed=risk_assessed)
    result.country_check_passed = check_country(resolve_country(instrument), restricted_countries, result.remarks)
    return result
