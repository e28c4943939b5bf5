"""Business logic for assignments, students, works and reports."""