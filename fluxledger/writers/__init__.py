"""
Output writers for billing documents.
"""

from .billing_document_writer import BillingDocument, BillingDocumentWriter

__all__ = ["BillingDocument", "BillingDocumentWriter"]
