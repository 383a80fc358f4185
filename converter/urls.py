from django.urls import path
from . import views

urlpatterns = [
    # Single conversions
    path('api/regex-to-nfa/', views.regex_to_epsilon_nfa, name='regex_to_nfa'),
    path('api/nfa-to-dfa/', views.convert_nfa_to_dfa, name='nfa_to_dfa'),
    path('api/dfa-to-regex/', views.convert_dfa_to_regex, name='dfa_to_regex'),
    path('api/nfa-to-regex/', views.convert_nfa_to_regex, name='nfa_to_regex'),

    # Multi-step conversion with exportable steps
    path('api/convert/', views.convert, name='convert'),
    path('api/examples/', views.conversion_examples, name='examples'),

    # Membership check for any automaton
    path('api/simulate/', views.simulate, name='simulate'),
]
