"""
startwork — Pick an issue assigned to you and start a branch for it.

Usage:
    startwork                         # launch interactive menu
    startwork start                   # run the Start Work wizard
    startwork start --issue o/r#42    # skip the picker
    startwork --help                  # CLI flags reference

Requires: git, plus gh (GitHub) and/or glab (GitLab) for issue access.
"""

from .cli import main
