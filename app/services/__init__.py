# Services package.
#
# Each module exposes a focused set of async functions for one aggregate:
#
#   post_service          — create / list / delete posts
#   like_service          — like toggle with LIKE notification
#   comment_service       — comment creation with COMMENT notification
#   profile_service       — profile page reads (posts, liked posts, follow state)
#   notification_service  — recipient's notification list and read marking
#   user_service          — account bootstrap
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Mutations also take the resolved actor id.
