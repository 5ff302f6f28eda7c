"""
GlowMatch skin quiz catalog.
Eight questions; ids 1, 4, 5 and 6 feed the results summary.
"""

from typing import List

from glowmatch_quiz.core.models import QuestionDefinition, QuestionOption, QuestionType

SKIN_QUIZ_QUESTIONS: List[QuestionDefinition] = [
    QuestionDefinition(
        id=1,
        title="What is your skin type?",
        subtitle="Think about how your skin feels a few hours after cleansing.",
        type=QuestionType.MULTIPLE_CHOICE,
        options=[
            QuestionOption(id="oily", label="Oily", description="Shiny all over, visible pores"),
            QuestionOption(id="dry", label="Dry", description="Tight, flaky or rough patches"),
            QuestionOption(id="combination", label="Combination", description="Oily T-zone, dry cheeks"),
            QuestionOption(id="sensitive", label="Sensitive", description="Easily red or irritated"),
            QuestionOption(id="normal", label="Normal", description="Balanced, rarely problematic"),
        ],
    ),
    QuestionDefinition(
        id=2,
        title="How often do you experience breakouts?",
        subtitle="Include pimples, blackheads and whiteheads.",
        type=QuestionType.MULTIPLE_CHOICE,
        options=[
            QuestionOption(id="never", label="Never"),
            QuestionOption(id="rarely", label="Rarely"),
            QuestionOption(id="sometimes", label="Sometimes"),
            QuestionOption(id="often", label="Often"),
            QuestionOption(id="constantly", label="Constantly"),
        ],
    ),
    QuestionDefinition(
        id=3,
        title="How does your skin feel by midday?",
        type=QuestionType.MULTIPLE_CHOICE,
        options=[
            QuestionOption(id="tight-dry", label="Tight and dry"),
            QuestionOption(id="comfortable", label="Comfortable"),
            QuestionOption(id="slightly-oily", label="Slightly oily"),
            QuestionOption(id="very-oily", label="Very oily"),
            QuestionOption(id="irritated", label="Irritated"),
        ],
    ),
    QuestionDefinition(
        id=4,
        title="What is your main skin concern?",
        subtitle="Pick the image closest to what bothers you most.",
        type=QuestionType.IMAGE_SELECTION,
        options=[
            QuestionOption(id="acne", label="Acne", image="https://images.unsplash.com/photo-1452223355713-db7fc5eed0b9"),
            QuestionOption(id="aging", label="Aging", image="https://images.unsplash.com/photo-1531067332586-ffe9e4d49477"),
            QuestionOption(id="dryness", label="Dryness", image="https://images.unsplash.com/photo-1729617086451-70a40832030b"),
            QuestionOption(id="pigmentation", label="Pigmentation", image="https://images.unsplash.com/photo-1702354408183-1d7a58afaf5f"),
            QuestionOption(id="sensitivity", label="Sensitivity", image="https://images.unsplash.com/photo-1694226016585-d4a261afee7c"),
            QuestionOption(id="pores", label="Enlarged pores", image="https://images.unsplash.com/photo-1567854143419-b38292f838c5"),
        ],
    ),
    QuestionDefinition(
        id=5,
        title="How sensitive is your skin?",
        subtitle="1 = never reacts, 5 = reacts to almost everything",
        type=QuestionType.SLIDER,
        min=1,
        max=5,
        step=1,
        labels={
            1: "Not sensitive",
            2: "Slightly sensitive",
            3: "Moderately sensitive",
            4: "Very sensitive",
            5: "Extremely sensitive",
        },
    ),
    QuestionDefinition(
        id=6,
        title="How complex should your routine be?",
        type=QuestionType.MULTIPLE_CHOICE,
        options=[
            QuestionOption(id="minimal", label="Minimal", description="1-2 steps"),
            QuestionOption(id="basic", label="Basic", description="3-4 steps"),
            QuestionOption(id="comprehensive", label="Comprehensive", description="5-6 steps"),
            QuestionOption(id="extensive", label="Extensive", description="7+ steps"),
        ],
    ),
    QuestionDefinition(
        id=7,
        title="How much time can you spend on skincare daily?",
        type=QuestionType.MULTIPLE_CHOICE,
        options=[
            QuestionOption(id="under-5", label="Under 5 minutes"),
            QuestionOption(id="5-10", label="5-10 minutes"),
            QuestionOption(id="10-20", label="10-20 minutes"),
            QuestionOption(id="over-20", label="Over 20 minutes"),
        ],
    ),
    QuestionDefinition(
        id=8,
        title="What is your skincare budget?",
        type=QuestionType.MULTIPLE_CHOICE,
        options=[
            QuestionOption(id="budget", label="Budget"),
            QuestionOption(id="moderate", label="Moderate"),
            QuestionOption(id="premium", label="Premium"),
            QuestionOption(id="luxury", label="Luxury"),
        ],
    ),
]


def get_question(question_id: int) -> QuestionDefinition:
    for question in SKIN_QUIZ_QUESTIONS:
        if question.id == question_id:
            return question
    raise KeyError(f"Unknown question id: {question_id}")
