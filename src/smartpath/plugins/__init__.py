"""Plugin package initialiser (source of truth).

Rebuild rules:
- Keep this file lightweight; concrete plugins are not imported here so that
  importing ``smartpath.plugins`` stays side-effect free.
- Concrete plugin modules (``logging``, ``pydantic``) self-register when
  imported elsewhere (see ``smartpath.__init__`` for eager imports).
"""

__all__: list[str] = []
