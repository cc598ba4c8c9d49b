"""
Permission management feature module.

Organization-scoped permission catalogue, direct role grants and the
inheritance of delegable grants down the role hierarchy.
"""
