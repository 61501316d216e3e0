"""Plugin package for Genro NavRoutes.

This package contains built-in plugins for the Router.

Note: Do not import concrete plugins here to keep imports side-effect free.
Concrete plugin modules (logging) self-register when imported via the main
genro_navroutes package.
"""

__all__: list[str] = []
