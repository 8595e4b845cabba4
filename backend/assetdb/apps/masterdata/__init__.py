"""
Master data: departments, locations and employees (borrowers).
"""
