"""Command-line interface for the answer evaluator."""

import argparse
import json
import sys
from answer_evaluator import (
    AnswerEvaluator,
    EvaluationOptions,
    SessionReport,
    analyze_text,
    load_answers,
    load_questions,
)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='answer-eval',
        description="Grade free-text exam answers against reference answers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Grade an answer sheet
  answer-eval grade questions.json answers.json --output results/

  # Show the second hint level for a question
  answer-eval hint questions.json Q_12 --level 2

  # Inspect how a text is tokenized
  answer-eval analyze "Softmax over scaled dot products"
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Grade command
    grade_parser = subparsers.add_parser('grade', help='Grade an answer sheet')
    grade_parser.add_argument('questions', help='Path to question bank JSON file')
    grade_parser.add_argument('answers', help='Path to answer sheet JSON file')
    grade_parser.add_argument('--output', '-o', default='evaluation_results',
                              help='Output directory (default: evaluation_results)')
    grade_parser.add_argument('--keyword-weight', type=float, default=0.4)
    grade_parser.add_argument('--jaccard-weight', type=float, default=0.3)
    grade_parser.add_argument('--math-weight', type=float, default=0.2)
    grade_parser.add_argument('--length-weight', type=float, default=0.1)
    grade_parser.add_argument('--min-length', type=int, default=10,
                              help='Minimum answer length in characters (default: 10)')
    grade_parser.add_argument('--no-plots', action='store_true',
                              help='Only write the JSON report')

    # Hint command
    hint_parser = subparsers.add_parser('hint', help='Show a hint for a question')
    hint_parser.add_argument('questions', help='Path to question bank JSON file')
    hint_parser.add_argument('question_id', help='Question id')
    hint_parser.add_argument('--level', '-l', type=int, choices=[1, 2, 3], default=1,
                             help='Hint level (default: 1)')

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Show tokens, keywords and math terms of a text')
    analyze_parser.add_argument('text', help='Text to analyze')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == 'analyze':
        print(json.dumps(analyze_text(args.text), indent=2, ensure_ascii=False))
        return 0

    # Load question bank
    print(f"Loading questions from {args.questions}...")
    questions = load_questions(args.questions)
    print(f"✓ Loaded {len(questions)} questions")

    if args.command == 'hint':
        evaluator = AnswerEvaluator()
        question = next((q for q in questions if q.id == args.question_id), None)
        if question is None:
            print(f"⚠ Question '{args.question_id}' not found")
            return 1
        print()
        print(evaluator.generate_hint(question, args.level))
        return 0

    if args.command == 'grade':
        options = EvaluationOptions(
            keyword_weight=args.keyword_weight,
            jaccard_weight=args.jaccard_weight,
            math_weight=args.math_weight,
            length_weight=args.length_weight,
            min_answer_length=args.min_length,
        )
        evaluator = AnswerEvaluator(options)

        answers = load_answers(args.answers)
        print(f"✓ Loaded {len(answers)} answers")

        print("\nGrading answers...")
        records = evaluator.grade_session(questions, answers)

        report = SessionReport(records, total_questions=len(questions))
        report.print_summary()
        report.save(args.output, plots=not args.no_plots)

        print(f"\n✅ Grading complete! Results saved to {args.output}/")
        return 0

    return 0


if __name__ == '__main__':
    sys.exit(main())
