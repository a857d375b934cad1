"""
Cotizador — raw-material costing and quotation service.

Materials are recorded per user; quotations are composed from weighted
percentages of those materials, priced with a flat margin and exported as PDF.
"""
