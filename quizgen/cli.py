# cli.py
"""
Terminal front-end for QuizGen.

    quizgen serve [--host 127.0.0.1] [--port 8000]
    quizgen take notes.pdf [--questions 5]
    quizgen resume 12
"""
import argparse
import logging
import sys
import textwrap

from quizgen.client import ApiClient, ApiError, API_BASE_URL
from quizgen.errors import ValidationError
from quizgen.schemas import DEFAULT_QUESTION_COUNT, MAX_QUESTION_COUNT
from quizgen.session import QuizSession, SessionState

LETTERS = "ABCD"


def _wrap(text: str, indent: str = "   ") -> str:
    return textwrap.fill(text or "", width=88, initial_indent=indent, subsequent_indent=indent)


def show_question(session: QuizSession, out=sys.stdout) -> None:
    q = session.current_question
    print(f"\nQuestion {session.current_index + 1} of {len(session.questions)}", file=out)
    print(_wrap(q.question, ""), file=out)
    for i, option in enumerate(q.options):
        marker = "*" if session.selected == i else " "
        print(f" {marker} {LETTERS[i]}) {option}", file=out)


def show_feedback(session: QuizSession, out=sys.stdout) -> None:
    q = session.current_question
    answer = session.current_answer
    if answer.is_correct:
        print("Correct!", file=out)
    else:
        print(f"Incorrect. Correct answer: {LETTERS[q.correct_answer]}) {q.options[q.correct_answer]}", file=out)
    print(_wrap(q.explanation), file=out)


def show_summary(session: QuizSession, out=sys.stdout) -> None:
    print("\nQuiz Completed!", file=out)
    print(f"Your Score: {session.correct_count}/{len(session.questions)} ({session.percentage}%)", file=out)
    print(session.message, file=out)


def run_session(session: QuizSession, read=input, out=sys.stdout) -> None:
    """
    Drives an IN_PROGRESS session from user commands until it completes.
    Commands: a-d select+submit, n next, p previous, d dive deeper, q quit.
    """
    show_question(session, out)
    while session.state == SessionState.IN_PROGRESS:
        prompt = "[n]ext, [p]rev, [d]ive deeper, [q]uit > " if session.show_feedback else "Answer (a-d), [p]rev, [q]uit > "
        cmd = read(prompt).strip().lower()

        if cmd == "q":
            raise KeyboardInterrupt
        if cmd == "p":
            if session.is_first:
                print("Already at the first question.", file=out)
                continue
            session.previous()
            show_question(session, out)
            if session.show_feedback:
                show_feedback(session, out)
            continue
        if session.show_feedback:
            if cmd == "n":
                session.next()
                if session.state == SessionState.IN_PROGRESS:
                    show_question(session, out)
            elif cmd == "d":
                print(_wrap(session.current_question.dive_deeper), file=out)
            else:
                print("Unknown command.", file=out)
            continue

        try:
            if cmd:
                if len(cmd) != 1 or cmd not in "abcd":
                    raise ValidationError("Please select one of the listed options")
                session.select(LETTERS.lower().index(cmd))
            session.submit_answer()
        except ValidationError as e:
            print(e.message, file=out)
            continue
        show_feedback(session, out)


def take_quiz(client: ApiClient, quiz: dict, read=input, out=sys.stdout) -> None:
    session = QuizSession()
    if session.load(quiz) == SessionState.UPLOAD_REQUIRED:
        print("No quiz data found. Please upload a PDF first.", file=out)
        return

    while True:
        run_session(session, read, out)
        show_summary(session, out)
        result = client.submit_quiz(quiz["quizId"], session.submission())
        print(f"Server score: {result['score']}/{result['totalQuestions']} ({result['percentage']}%)", file=out)

        if read("Retake quiz? [y/N] > ").strip().lower() != "y":
            return
        session.restart()


def _cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("quizgen.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _cmd_take(args) -> int:
    client = ApiClient(args.api_url)
    upload = client.upload_pdf(args.pdf)
    print(f"Uploaded {upload['originalName']} ({upload['extractedTextLength']} characters extracted)")
    quiz = client.generate_quiz(upload["uploadId"], args.questions)
    print(f"Generated \"{quiz['title']}\" (quiz id {quiz['quizId']})")
    take_quiz(client, quiz)
    return 0


def _cmd_resume(args) -> int:
    client = ApiClient(args.api_url)
    take_quiz(client, client.get_quiz(args.quiz_id))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quizgen", description="Turn PDFs into multiple-choice quizzes.")
    parser.add_argument("--api-url", default=API_BASE_URL, help="QuizGen API base URL")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_cmd_serve)

    take = sub.add_parser("take", help="Upload a PDF, generate a quiz and take it")
    take.add_argument("pdf")
    take.add_argument("--questions", type=int, default=DEFAULT_QUESTION_COUNT,
                      choices=range(1, MAX_QUESTION_COUNT + 1), metavar="N")
    take.set_defaults(func=_cmd_take)

    resume = sub.add_parser("resume", help="Take an existing quiz by id")
    resume.add_argument("quiz_id", type=int)
    resume.set_defaults(func=_cmd_resume)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return args.func(args)
    except (ApiError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nBye.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
