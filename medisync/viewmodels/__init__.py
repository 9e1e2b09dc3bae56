"""ViewModel package for dashboard state and settings.

Call context:
    ``medisync/app/controller.py`` builds these viewmodels and binds them to
    ``SyncController`` hooks so every published snapshot reaches the views.

Dependencies:
    Modules in this package depend on domain types and lightweight formatting
    helpers only. I/O adapters and use-case orchestration remain outside.
"""
