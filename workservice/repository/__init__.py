"""Database access for assignments, students and works."""