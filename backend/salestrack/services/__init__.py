"""
SalesTrack Backend — Services Layer
=====================================

Service Inventory:
    - DocumentStore (abstract): versioned fetch / conditional store
    - GitHubDocumentStore: GitHub repository contents API (httpx + tenacity)
    - FileDocumentStore: local JSON file (aiofiles)
    - DocumentCache: last-known document + validity window
    - merge_documents: union merge keyed by entity id, local wins
    - DocumentSynchronizer: read-through cache, conditional write, merge/retry
    - SellerService / ProductService / CategoryService: business rules over a
      per-request document session
"""
