"""
Example: Basic usage of the answer evaluator package
"""

import json

from answer_evaluator import (
    AnswerEvaluator,
    Question,
    SessionReport,
    evaluate_numerical_answer,
    load_answers,
    load_questions,
)


def example_1_single_answer():
    """Grade one free-text answer."""
    print("Example 1: Grading a single answer")
    print("=" * 60)

    question = Question.from_dict({
        "id": "Q_1",
        "topic": "Transformer/Attention",
        "question_text": "Explain scaled dot-product attention.",
        "given_answer": "Attention compares queries with keys, scales the dot products "
                        "by the square root of d_k and applies softmax to weight the values.",
        "math_blocks": [r"\text{softmax}(QK^T / \sqrt{d_k}) V"],
    })

    evaluator = AnswerEvaluator()
    result = evaluator.evaluate(
        "Queries are compared with keys, the softmax of the scores weights the values.",
        question,
    )

    print(result.feedback)
    print(f"Suggestions: {result.suggestions}")
    print()


def example_2_hints():
    """Show the three hint levels for a question."""
    print("\nExample 2: Hints")
    print("=" * 60)

    question = Question.from_dict({
        "topic": "Embeddings",
        "given_answer": "1. Tokenize the corpus.\n2. Train word2vec.\n3. Compare vectors with cosine similarity.",
    })

    evaluator = AnswerEvaluator()
    for level in (1, 2, 3):
        print(evaluator.generate_hint(question, level))
        print()


def example_3_numerical():
    """Compare the numbers in a calculation answer."""
    print("\nExample 3: Numerical answers")
    print("=" * 60)

    result = evaluate_numerical_answer("Precision is 0.75 and recall 0.6", "P = 0.75, R = 0.60")
    print(f"Score: {result.score:.2f} - {result.feedback}")
    print()


def example_4_session():
    """Grade an answer sheet and write the session report."""
    print("\nExample 4: Grading a session")
    print("=" * 60)

    bank = {
        "exam_questions": [
            {
                "id": "Q_1",
                "topic": "BERT",
                "type": "mc_radio",
                "options": ["Masked language modeling", "Next word prediction only"],
                "correct_options": ["A"],
            },
            {
                "id": "Q_2",
                "topic": "Evaluation",
                "type": "rechenaufgabe",
                "given_answer": "F1 = 2 * 0.5 * 0.5 / (0.5 + 0.5) = 0.5",
            },
        ]
    }
    answers = [
        {"question_id": "Q_1", "answer": "A", "mode": "exam", "time_spent": 12},
        {"question_id": "Q_2", "answer": "The F1 score is 0.5", "mode": "exam", "time_spent": 40},
    ]

    with open("example_questions.json", "w", encoding="utf-8") as f:
        json.dump(bank, f, indent=2)
    with open("example_answers.json", "w", encoding="utf-8") as f:
        json.dump(answers, f, indent=2)

    evaluator = AnswerEvaluator()
    records = evaluator.grade_session(
        load_questions("example_questions.json"),
        load_answers("example_answers.json"),
    )

    report = SessionReport(records)
    report.print_summary()
    report.save("example_output")
    print()


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("ANSWER EVALUATOR - USAGE EXAMPLES")
    print("=" * 60)

    example_1_single_answer()
    example_2_hints()
    example_3_numerical()
    example_4_session()

    print("\n" + "=" * 60)
    print("✅ All examples completed successfully!")
    print("=" * 60)
    print("\nGenerated files:")
    print("  - example_questions.json, example_answers.json")
    print("  - example_output/ (session report and plots)")
    print()
