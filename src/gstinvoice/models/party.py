from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from gstinvoice.utils.coerce import first_non_empty

_GSTIN_STATE = re.compile(r"^(\d{2})[0-9A-Z]{13}$")


@dataclass(frozen=True)
class BankDetails:
    bank_name: str = ""
    branch: str = ""
    account_number: str = ""
    ifsc: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> BankDetails:
        return cls(
            bank_name=first_non_empty(d, "bankName"),
            branch=first_non_empty(d, "branch", "branchName"),
            account_number=first_non_empty(d, "accountNumber", "accountNo"),
            ifsc=first_non_empty(d, "ifsc", "ifscCode"),
        )


@dataclass(frozen=True)
class Party:
    """Seller, buyer, ship-to or company profile: free-form display fields."""

    name: str = ""
    company: str = ""
    address: str = ""
    state: str = ""
    state_code: str = ""
    pin_code: str = ""
    phone: str = ""
    email: str = ""
    gstin: str = ""
    pan: str = ""
    contact_name: str = ""
    bank: BankDetails = field(default_factory=BankDetails)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> Party:
        """Create a Party from a mapping; missing objects give an empty Party."""
        d = d or {}
        return cls(
            name=first_non_empty(d, "name", "companyName"),
            company=first_non_empty(d, "company"),
            address=first_non_empty(d, "address"),
            state=first_non_empty(d, "state"),
            state_code=first_non_empty(d, "stateCode"),
            pin_code=first_non_empty(d, "pinCode", "pincode"),
            phone=first_non_empty(d, "phone"),
            email=first_non_empty(d, "email"),
            gstin=first_non_empty(d, "gstin").upper(),
            pan=first_non_empty(d, "pan").upper(),
            contact_name=first_non_empty(d, "contactName"),
            bank=BankDetails.from_dict(d),
        )

    @property
    def resolved_state_code(self) -> str:
        """stateCode, else the two-digit state prefix of the GSTIN, else ''."""
        if self.state_code:
            return self.state_code.zfill(2)
        m = _GSTIN_STATE.match(self.gstin)
        return m.group(1) if m else ""
