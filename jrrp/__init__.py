"""
Jrrp - Daily luck values, leaderboards and history
"""

__red_end_user_data_statement__ = (
    "This cog stores a daily luck value and the last seen display name for each user "
    "who uses it. Records are kept to build averages, leaderboards and history."
)

__author__ = "Fire & Rescue Academy Development Team"
__version__ = "1.0.0"


async def setup(bot):
    """Load the Jrrp cog."""
    from .jrrp import Jrrp

    await bot.add_cog(Jrrp(bot))
