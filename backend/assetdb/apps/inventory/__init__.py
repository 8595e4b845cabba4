"""Products, serial-tracked units, SKU numbering and stock counts."""
