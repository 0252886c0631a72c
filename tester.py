import difflib
import os
from io import StringIO
from typing import List

from compiler import Compiler

TESTCASES_DIR: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), "testcases")


def main():
    all_passed = True
    for test_folder_name in list_testcases():
        print("---------------------------------------")
        print(f"running test {test_folder_name}:")
        if run_testcase(os.path.join(TESTCASES_DIR, test_folder_name), True):
            print("Passed!")
        else:
            all_passed = False
    print("---------------------------------------")
    if all_passed:
        print("All tests passed!")


def list_testcases() -> List[str]:
    """Return the names of the testcase folders, T1 first."""
    names = [name for name in os.listdir(TESTCASES_DIR) if os.path.isdir(os.path.join(TESTCASES_DIR, name))]
    return sorted(names, key=lambda name: (len(name), name))


def run_testcase(testcase_folder: str, detailed: bool = False) -> bool:
    """Checks every expected file present in testcase_folder."""
    is_passed = True
    if os.path.exists(os.path.join(testcase_folder, "tokens.txt")):
        is_passed &= run_scanner(testcase_folder, detailed)
    if os.path.exists(os.path.join(testcase_folder, "parse_tree.txt")):
        is_passed &= run_parser(testcase_folder, detailed)
    return is_passed


def run_parser(testcase_folder: str, detailed: bool = False) -> bool:
    output = StringIO()
    Compiler(os.path.join(testcase_folder, "input.txt"), output=output).run()
    return check_output_equality(detailed, output.getvalue(), "parse_tree.txt", testcase_folder)


def run_scanner(testcase_folder: str, detailed: bool = False) -> bool:
    output = StringIO()
    Compiler(os.path.join(testcase_folder, "input.txt"), scan_only=True, output=output).run()
    return check_output_equality(detailed, output.getvalue(), "tokens.txt", testcase_folder)


def check_output_equality(detailed: bool, output: str, file_name: str, testcase_folder: str) -> bool:
    """Compares output with the expected file, ignoring trailing whitespace but not indentation.

    Prints a mismatch report, with a unified diff if detailed.
    """
    with open(os.path.join(testcase_folder, file_name), "r", encoding="utf-8") as expected_file:
        expected_lines = [line.rstrip() for line in expected_file.read().splitlines()]
    produced_lines = [line.rstrip() for line in output.splitlines()]
    if produced_lines == expected_lines:
        return True

    print(f"{file_name} differs from the expected output")
    if detailed:
        diff = difflib.unified_diff(expected_lines, produced_lines,
                                    fromfile=f"expected/{file_name}", tofile=f"produced/{file_name}", lineterm="")
        print("\n".join(diff))
    return False


if __name__ == '__main__':
    main()
