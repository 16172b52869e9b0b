from __future__ import annotations

from omnirest.catalog.entity_catalog import EntityCatalog, entity
from omnirest.catalog.models import PagingConfig

# Every ZohoBooks v3 call except organizations needs the organization id.
_ORG = ("organization_id",)

ZOHOBOOKS = EntityCatalog(
    "zohobooks",
    [
        ("organizations", entity("organizations", "organizations")),

        # Contacts
        ("contacts", entity("contacts", "contacts", _ORG)),
        ("customers", entity("customers", "customers", _ORG)),
        ("vendors", entity("vendors", "vendors", _ORG)),

        ("items", entity("items", "items", _ORG)),

        # Sales / purchases
        ("invoices", entity("invoices", "invoices", _ORG)),
        ("invoice_items", entity("invoices/{invoice_id}/items", "invoice_items", _ORG + ("invoice_id",))),
        ("bills", entity("bills", "bills", _ORG)),
        ("bill_items", entity("bills/{bill_id}/items", "bill_items", _ORG + ("bill_id",))),
        ("payments", entity("customerpayments", "customerpayments", _ORG)),
        ("vendorpayments", entity("vendorpayments", "vendorpayments", _ORG)),
        ("creditnotes", entity("creditnotes", "creditnotes", _ORG)),
        ("estimates", entity("estimates", "estimates", _ORG)),
        ("purchaseorders", entity("purchaseorders", "purchaseorders", _ORG)),

        # Accounting
        ("journals", entity("journals", "journals", _ORG)),
        ("chartofaccounts", entity("chartofaccounts", "chartofaccounts", _ORG)),
        ("accounts", entity("chartofaccounts", "chartofaccounts", _ORG)),
        ("bankaccounts", entity("bankaccounts", "bankaccounts", _ORG)),
        ("banktransactions", entity("banktransactions", "transactions", _ORG)),
        ("expenses", entity("expenses", "expenses", _ORG)),

        # Projects
        ("projects", entity("projects", "projects", _ORG)),
        ("timesheets", entity("projects/timesheets", "timesheets", _ORG)),

        # Settings
        ("taxes", entity("settings/taxes", "taxes", _ORG)),
        ("users", entity("users", "users", _ORG)),
        ("currencies", entity("settings/currencies", "currencies", _ORG)),
        ("customfields", entity("settings/customfields", "customfields", _ORG)),
    ],
    paging=PagingConfig(
        strategy="page", page_param="page", size_param="per_page",
        min_size=10, max_size=200,
    ),
)
