"""
Faceted profile search.

Modules, leaf first:
- filter_state: canonical filter model, defaults, normalization, active chips
- filter_sync: filter state <-> flat URL/API parameters
- mode_adapter: basic <-> advanced filter conversion
- query_compiler: filter state -> SQLAlchemy predicates, ordering, page window
- executor: compiled query -> paginated result envelope
- search_history / dispatcher: client-side autocomplete and debounced dispatch
"""
