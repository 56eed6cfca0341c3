"""EduAgent: adaptive content orchestration for personalized learning."""
