"""
Models package.

- domain/ - Core business entities (Person, Family, HomeView, QuizResult)
"""
