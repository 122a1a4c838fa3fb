"""
Pure billing domain: catalog entities, line items, bill arithmetic and sale
records. Nothing in this package performs I/O.
"""
