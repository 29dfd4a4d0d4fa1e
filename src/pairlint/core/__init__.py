"""
Rule Matching and Validation Core.

Modules:
    - ``selectors``: Parsing of rule / whitelist specs into the immutable `Registry`.
    - ``descriptors``: Call-site and argument descriptors produced by the front end.
    - ``matcher``: Decides whether (and at which offset) a rule applies to a call.
    - ``validator``: The pair checks, producing diagnostics.
    - ``diagnostics``: Message formats, the diagnostic model and sinks.
    - ``engine``: Runs the front end and the core over Python modules.
"""
