"""Task tracker REST backend: users, bearer auth, owner-scoped tasks."""
