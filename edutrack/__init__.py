"""
EduTrack - lesson progress tracking and quiz grading service
"""
