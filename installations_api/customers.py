from __future__ import annotations

from dataclasses import dataclass

from installations_api.store import InstallationStore


@dataclass(frozen=True)
class CustomerContact:
    email: str
    display_name: str


class CustomerDirectory:
    """Customer contact lookup backed by the tenant's ``customers`` rows."""

    def __init__(self, store: InstallationStore):
        self.store = store

    def get_customer_contact(self, customer_id: str) -> CustomerContact:
        customer = self.store.get_customer(customer_id)
        display_name = " ".join(part for part in [customer.first_name, customer.last_name] if part).strip()
        return CustomerContact(email=customer.email, display_name=display_name or customer.email)
