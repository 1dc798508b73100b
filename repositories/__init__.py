"""
repositories/ - Data Access Layer
==================================
One repository per table. Each owns the SQL for its entity, commits or
rolls back its own connection, and hands back domain models. Balance
arithmetic happens in SQL here (`amount = amount + delta`) and nowhere else.
"""
