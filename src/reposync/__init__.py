"""reposync: keep a git working tree in sync with its remote.

The core is :class:`reposync.repository.Repository`, which caches derived
state, guards concurrent operations and classifies git failures. The
status bar controller and command registry sit on top of it.
"""

__version__ = "0.1.0"
