"""
Control API Branch
HTTP endpoints for the web control panel: rule updates and bot status.
"""

from .branch import ControlAPI

__all__ = ['ControlAPI', 'setup']

async def setup(bot):
    """Load the ControlAPI branch."""
    await bot.add_cog(ControlAPI(bot))
