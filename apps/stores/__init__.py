"""
Stores App - Purchasing Store Registry

Stores are the shops that purchases are booked against. Each store carries
a progress-bar configuration used by clients to colour how close a purchase
is to its due date.
"""
