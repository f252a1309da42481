"""
Scaffold engine — rollback ledger, safe executor, interrupt guard
and the staged pipeline that ties them together.
"""
