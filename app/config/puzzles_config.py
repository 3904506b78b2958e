"""
Quiz and Puzzle Configuration
Categories for AI-generated questions, the offline fallback question bank,
and the default gating questions inserted into groups that have none.
"""

PUZZLE_CATEGORIES = [
    "history",
    "poetry",
    "food",
    "travel",
    "humor",
    "sports",
    "technology",
    "music",
    "culture",
    "science",
    "art",
    "geography",
    "traditions",
    "literature",
    "nature",
]

DEFAULT_PUZZLE_COUNT = 8

# Upper bound of categories mentioned in a single prompt
MAX_PROMPT_CATEGORIES = 6

# Served when the LLM endpoint is unreachable or returns garbage
FALLBACK_QUESTIONS = [
    {
        "category": "history",
        "question": "Goorma ayaa la aasaasay Soomaaliya?",
        "options": ["1960", "1950", "1970", "1980"],
    },
    {
        "category": "poetry",
        "question": "Ma sheegi kartaa nooca gabayga caanka ah ee Soomaalida?",
        "options": None,
    },
    {
        "category": "food",
        "question": "Canjeero waxaa inta badan lagu cunaa?",
        "options": ["Quraac", "Casho", "Qado", "Dhamaan wakhtiyada"],
    },
    {
        "category": "travel",
        "question": "Magaalada ugu weyn Soomaaliya waa?",
        "options": ["Muqdisho", "Hargeysa", "Kismaayo", "Boosaaso"],
    },
    {
        "category": "humor",
        "question": "Sheeko-xariirooyin Soomaaliyeed maxay inta badan ka hadlaan?",
        "options": None,
    },
    {
        "category": "sports",
        "question": "Ciyaarta ugu caansan Soomaaliya waa?",
        "options": ["Kubadda Cagta", "Orodka", "Kubadda Kolayga", "Dabaasha"],
    },
    {
        "category": "technology",
        "question": "Shirkadda telefoonada gacanta ee ugu caansan Soomaaliya?",
        "options": ["Hormuud", "Somtel", "Telesom", "Golis"],
    },
    {
        "category": "culture",
        "question": "Maxaa kuu muhiimsan dhaqanka Soomaalida?",
        "options": None,
    },
]

DEFAULT_GROUP_QUESTIONS = [
    {
        "question": "Do you want to join this group?",
        "options": ["Yes, I do", "No, I don't", "Maybe later", "I'm not sure"],
        "correct_answer": 0,
    },
    {
        "question": "What are you interested in discussing in this group?",
        "options": ["General topics", "Specific interests", "Meeting new people", "Learning together"],
        "correct_answer": 0,
    },
]
