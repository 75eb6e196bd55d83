"""
Product Catalog Admin

Modules:
    models      - Data models (Product, result records)
    common      - Shared utilities (config loader, logging, CSV utils, text)
    shopify     - Shopify CSV export and import
    store       - Product persistence (Supabase, in-memory)
    images      - Product image upload
    ai          - AI image analysis
    services    - Workflows over the collaborators
"""
