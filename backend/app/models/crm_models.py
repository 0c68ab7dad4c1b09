"""Pydantic models for the read-only CRM entity snapshot."""

from __future__ import annotations

from pydantic import BaseModel


class Contact(BaseModel):
    id: str
    name: str
    role: str = ""
    email: str | None = None
    phone: str | None = None
    is_primary: bool = False


class Account(BaseModel):
    id: str
    org_id: str
    name: str
    account_number: str = ""
    contacts: list[Contact] = []
    linked_account_ids: list[str] | None = None  # lateral links, symmetric


class Org(BaseModel):
    id: str
    name: str
    accounts: list[Account] = []


class CrmSnapshot(BaseModel):
    """A fully materialized snapshot of orgs, their accounts and contacts."""

    orgs: list[Org] = []


class OrgSummary(BaseModel):
    id: str
    name: str
    account_count: int = 0


class StoreStatus(BaseModel):
    loaded: bool
    org_count: int = 0
    account_count: int = 0
    source: str | None = None
    error: str | None = None
