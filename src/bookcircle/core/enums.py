"""
Enumerations shared by the ORM models and the Pydantic schemas.
Values are the strings stored in the database.
"""

from enum import Enum


class Shelf(str, Enum):
    TO_READ = "toRead"
    READ = "read"
    DNF = "dnf"


class Genre(str, Enum):
    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    FANTASY = "Fantasy"
    SCI_FI = "Sci-Fi"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SELF_HELP = "Self-Help"
    BUSINESS = "Business"
    PHILOSOPHY = "Philosophy"
    INDIAN_LITERATURE = "Indian Literature"
    MYTHOLOGY = "Mythology"
    POETRY = "Poetry"
    DRAMA = "Drama"
    THRILLER = "Thriller"
    HORROR = "Horror"
    COMEDY = "Comedy"
    TRAVEL = "Travel"
    FOOD = "Food"
    ART = "Art"
    SCIENCE = "Science"
    TECHNOLOGY = "Technology"
    IAS_PREPARATION = "IAS Preparation"
    FINANCE = "Finance"
    SPIRITUALITY = "Spirituality"
    HEALTH = "Health"
    PARENTING = "Parenting"
    EDUCATION = "Education"
    POLITICS = "Politics"
    ECONOMICS = "Economics"
    PSYCHOLOGY = "Psychology"
    SOCIOLOGY = "Sociology"


class Language(str, Enum):
    ENGLISH = "English"
    HINDI = "Hindi"
    MARATHI = "Marathi"
    TAMIL = "Tamil"
    BENGALI = "Bengali"
    GUJARATI = "Gujarati"
    TELUGU = "Telugu"
    KANNADA = "Kannada"
    MALAYALAM = "Malayalam"
    PUNJABI = "Punjabi"


class BookStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class DiscussionCategory(str, Enum):
    INDIAN_FICTION = "Indian Fiction"
    MYTHOLOGY = "Mythology"
    FINANCE_BOOKS = "Finance Books"
    IAS_PREPARATION = "IAS Preparation"
    SELF_HELP = "Self-Help"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SCIENCE_FICTION = "Science Fiction"
    ROMANCE = "Romance"
    MYSTERY = "Mystery"
    FANTASY = "Fantasy"
    POETRY = "Poetry"
    DRAMA = "Drama"
    NON_FICTION = "Non-Fiction"
    GENERAL_DISCUSSION = "General Discussion"
    BOOK_RECOMMENDATIONS = "Book Recommendations"
    AUTHOR_DISCUSSIONS = "Author Discussions"
    BOOK_REVIEWS = "Book Reviews"
    READING_CHALLENGES = "Reading Challenges"


class EventType(str, Enum):
    BOOK_FAIR = "Book Fair"
    AUTHOR_MEET = "Author Meet"
    READING_CLUB = "Reading Club"
    BOOK_LAUNCH = "Book Launch"
    LITERARY_FESTIVAL = "Literary Festival"
    WORKSHOP = "Workshop"
    BOOK_DISCUSSION = "Book Discussion"
    POETRY_READING = "Poetry Reading"
    STORYTELLING = "Storytelling"
    BOOK_EXCHANGE = "Book Exchange"
    LIBRARY_VISIT = "Library Visit"
    OTHER = "Other"


class EventCategory(str, Enum):
    INDIAN_LITERATURE = "Indian Literature"
    MYTHOLOGY = "Mythology"
    FINANCE = "Finance"
    IAS_PREPARATION = "IAS Preparation"
    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    POETRY = "Poetry"
    DRAMA = "Drama"
    GENERAL = "General"
    CHILDREN = "Children"
