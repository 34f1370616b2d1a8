"""
Tickets Branch
Channel-based support tickets opened from a category select panel.

Structure:
- branch.py: Main Tickets class, panel publishing
- controller.py: TicketController (ticket creation and closing), CreationLocks
- views.py: TicketPanelView, TicketControlView (UI components)
- rules.py: RuleDocument, RuleStore (panel and ticket rules JSON file)
- helpers.py: Categories, embed builders and permission helpers
- config.yml: Channel/role IDs and panel text
"""

from .branch import Tickets

__all__ = ['Tickets', 'setup']

async def setup(bot):
    """Load the Tickets branch."""
    await bot.add_cog(Tickets(bot))
