"""
Mushroom Hunter Backend — Species Import
==========================================

What:  Loads the species checklist CSV into the taxonomy tables and keeps
       the findings table consistent afterwards.

Modules:
    - german_names:   plural German genus names ("Täubling" → "Täublinge")
    - species_import: row parsing, reconciliation (get-or-create per level)
                      and the import run itself
    - orphans:        findings whose species row no longer exists
"""
