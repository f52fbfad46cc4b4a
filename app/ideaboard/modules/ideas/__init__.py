"""
Ideas module.

- Idea list with category/status filters and pagination (the home page)
- Idea detail page with vote count, comments and in-app back link
- Create / edit / delete commands and the admin status change
"""
