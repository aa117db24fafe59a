"""
Test Configuration and Fixtures for psup.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psup.schemas import Problem, Sample
from psup.store import ProblemStore


PROBLEM_PAGE = """
<!DOCTYPE html>
<html>
<head><title>1000: A+B</title></head>
<body>
<div class="container content">
  <table class="table" id="problem-info">
    <thead>
      <tr><th>Time Limit</th><th>Memory Limit</th><th>Submissions</th></tr>
    </thead>
    <tbody>
      <tr><td>1 second</td><td>256 MB</td><td>123456</td></tr>
    </tbody>
  </table>
  <h1><span id="problem_title">A+B</span></h1>
  <section id="description">
    <div id="problem_description" class="problem-text">
      <p>Read two integers A and B,</p>
      <p>then print A+B.</p>
    </div>
  </section>
  <section id="input">
    <div id="problem_input" class="problem-text">
      <p>The first line contains A and B.<br>(0 &lt; A, B &lt; 10)</p>
    </div>
  </section>
  <section id="output">
    <div id="problem_output" class="problem-text">
      <p>Print A+B on the first line.</p>
    </div>
  </section>
  <section id="sampleinput1"><pre class="sampledata" id="sample-input-1">1 2
</pre></section>
  <section id="sampleoutput1"><pre class="sampledata" id="sample-output-1">3
</pre></section>
  <section id="sampleinput2"><pre class="sampledata" id="sample-input-2">  4 5  </pre></section>
  <section id="sampleoutput2"><pre class="sampledata" id="sample-output-2">9</pre></section>
</div>
</body>
</html>
"""


@pytest.fixture
def problem_page():
    """Synthetic problem page with two samples and a limits table."""
    return PROBLEM_PAGE


@pytest.fixture
def sample_problem():
    """Parsed problem as produced by the extractor."""
    return Problem(
        id="1000",
        title="A+B",
        description="Read two integers A and B,\n\nthen print A+B.",
        input_description="The first line contains A and B.\n(0 < A, B < 10)",
        output_description="Print A+B on the first line.",
        samples=[Sample(input="1 2", output="3"), Sample(input="4 5", output="9")],
        time_limit="1 second",
        memory_limit="256 MB",
    )


@pytest.fixture
def store(tmp_path):
    """Store backed by a fresh SQLite file."""
    db_path = tmp_path / "data" / "psup.db"
    store = ProblemStore(f"sqlite:///{db_path}")
    yield store
    store.close()
