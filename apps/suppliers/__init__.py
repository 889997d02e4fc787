"""
Suppliers App - Supplier Registry and Discount Tier Schedules

Each supplier keeps independent tier sets for 18k and 21k gold. A tier set
is a step function: the tier with the highest threshold not exceeding the
month's cumulative 21k-equivalent grams gives the discount percentage.

Architecture:
- Models: Supplier, DiscountTier
- Services: tier_resolution (pure resolver), supplier_management (CRUD + validation)
- Views: RESTful API with ViewSets
"""
