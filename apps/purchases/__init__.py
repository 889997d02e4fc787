"""
Purchases App - Gold Purchase Pricing and Settlement

Purchases are recorded per store with per-supplier receipts in 18k and 21k
grams. All quantities are normalized to 21k-equivalent grams, priced with a
per-gram base fee minus a supplier discount resolved on the month's
cumulative volume, and settled through a payment ledger.

Architecture:
- Models: Purchase, PurchaseSupplierReceipt, Payment
- Services: pure pricing engine (conversion, fees, status, month
  recalculation, settlement ledger) plus ORM persistence
- Views: RESTful API with ViewSets
- Exceptions: Domain exception hierarchy
"""
