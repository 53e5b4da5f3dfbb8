'''
Tutor Scheduler backend: weekly schedules, regular-student invitations and
team-hours reporting for a language-tutoring business.
'''
