from .crud_user import (
    get_user,
    get_user_by_email,
    create_user,
    get_users,
    search_users,
    deactivate_user,
    add_badge,
    move_to_shelf,
    apply_shelf_move,
    remove_from_shelf,
    get_shelves,
    start_reading,
    update_reading_progress,
)
from .crud_book import (
    create_book,
    get_book_by_id,
    get_book_by_isbn,
    search_books,
    get_popular_books,
    get_indian_books,
    get_featured_books,
    get_books_by_genre,
    get_books_by_author,
    list_genres,
    list_languages,
    list_books,
    apply_new_rating,
    replace_rating,
)
from .crud_review import (
    create_review,
    update_review_rating,
    update_review,
    delete_review,
    toggle_review_like,
    add_review_comment,
    mark_review_helpful,
    get_review_by_id,
    get_reviews_for_book,
    get_reviews_by_user,
    get_recent_reviews,
)
from .crud_discussion import (
    create_discussion,
    get_discussion,
    update_discussion,
    delete_discussion,
    set_discussion_flags,
    add_reply,
    mark_solution,
    toggle_discussion_like,
    get_discussions_by_category,
    get_popular_discussions,
    list_discussions,
)
from .crud_event import (
    create_event,
    get_event,
    update_event,
    cancel_event,
    delete_event,
    join_event,
    leave_event,
    mark_interested,
    remove_interested,
    get_upcoming_events,
    get_events_by_city,
    get_events_by_type,
    list_events,
)

__all__ = [
    "get_user",
    "get_user_by_email",
    "create_user",
    "get_users",
    "search_users",
    "deactivate_user",
    "add_badge",
    "move_to_shelf",
    "apply_shelf_move",
    "remove_from_shelf",
    "get_shelves",
    "start_reading",
    "update_reading_progress",
    "create_book",
    "get_book_by_id",
    "get_book_by_isbn",
    "search_books",
    "get_popular_books",
    "get_indian_books",
    "get_featured_books",
    "get_books_by_genre",
    "get_books_by_author",
    "list_genres",
    "list_languages",
    "list_books",
    "apply_new_rating",
    "replace_rating",
    "create_review",
    "update_review_rating",
    "update_review",
    "delete_review",
    "toggle_review_like",
    "add_review_comment",
    "mark_review_helpful",
    "get_review_by_id",
    "get_reviews_for_book",
    "get_reviews_by_user",
    "get_recent_reviews",
    "create_discussion",
    "get_discussion",
    "update_discussion",
    "delete_discussion",
    "set_discussion_flags",
    "add_reply",
    "mark_solution",
    "toggle_discussion_like",
    "get_discussions_by_category",
    "get_popular_discussions",
    "list_discussions",
    "create_event",
    "get_event",
    "update_event",
    "cancel_event",
    "delete_event",
    "join_event",
    "leave_event",
    "mark_interested",
    "remove_interested",
    "get_upcoming_events",
    "get_events_by_city",
    "get_events_by_type",
    "list_events",
]
