"""
hcptf - command-line client for the HCP Terraform and Terraform Enterprise API.
"""

__version__ = "0.1.0"

# Empty for releases, "dev" for local builds.
__prerelease__ = ""


def get_version() -> str:
    """Return the human readable version string."""
    if __prerelease__:
        return f"{__version__}-{__prerelease__}"
    return __version__


__all__ = ["__version__", "get_version"]
