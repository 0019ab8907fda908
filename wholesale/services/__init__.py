"""Order engine services.

Each public operation runs in one transaction and either commits or rolls back
and re-raises. Bucket mutations go through inventory_buckets only.
"""
