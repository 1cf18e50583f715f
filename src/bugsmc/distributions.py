"""
Log-Likelihood Functions for Stochastic Nodes

Each node kind supported by the model has a log density here, written
directly against numpy/scipy.special so it can be evaluated thousands of
times per second on small arrays. All densities sum over every element of
the node value (elements are conditionally independent given the
parameters) and return -inf outside the support instead of raising, so a
proposal that leaves the support is simply rejected by the sampler.

Parameterisations follow BUGS:
    normal   - mean mu, precision tau (variance = 1 / tau)
    uniform  - lower, upper bounds (inclusive)
    gamma    - shape alpha, rate beta
    binomial - trials n, success probability p

Parameters may be numbers, arrays, nodes/handles (anything with a `.value`)
or zero-argument callables. They are resolved on every evaluation, so a
likelihood always sees the current value of the nodes it depends on.
"""

import numpy as np
from scipy.special import gammaln, xlogy, xlog1py

_LOG_2PI = np.log(2.0 * np.pi)


def resolve(param):
    """Current numeric value of a likelihood parameter."""
    if hasattr(param, 'value'):
        return param.value
    if callable(param):
        return param()
    return param


def normal_logp(x, mu, tau) -> float:
    """Normal log density with precision tau."""
    x, mu, tau = np.asarray(x), np.asarray(mu), np.asarray(tau)
    if np.any(tau <= 0):
        return -np.inf
    x, mu, tau = np.broadcast_arrays(x, mu, tau)
    return float(np.sum(0.5 * np.log(tau) - 0.5 * _LOG_2PI - 0.5 * tau * (x - mu) ** 2))


def uniform_logp(x, lower, upper) -> float:
    """Uniform log density on [lower, upper]."""
    x, lower, upper = np.broadcast_arrays(np.asarray(x), np.asarray(lower), np.asarray(upper))
    if np.any(x < lower) or np.any(x > upper) or np.any(upper <= lower):
        return -np.inf
    return float(np.sum(-np.log(upper - lower)))


def gamma_logp(x, alpha, beta) -> float:
    """Gamma log density with shape alpha and rate beta."""
    x, alpha, beta = np.broadcast_arrays(np.asarray(x), np.asarray(alpha), np.asarray(beta))
    if np.any(x < 0) or np.any(alpha <= 0) or np.any(beta <= 0):
        return -np.inf
    return float(np.sum(
        xlogy(alpha, beta) - gammaln(alpha) + xlogy(alpha - 1.0, x) - beta * x
    ))


def binomial_logp(x, n, p) -> float:
    """Binomial log mass for x successes in n trials."""
    x, n, p = np.broadcast_arrays(np.asarray(x), np.asarray(n), np.asarray(p))
    if np.any(p < 0) or np.any(p > 1) or np.any(x < 0) or np.any(x > n):
        return -np.inf
    log_choose = gammaln(n + 1.0) - gammaln(x + 1.0) - gammaln(n - x + 1.0)
    return float(np.sum(log_choose + xlogy(x, p) + xlog1py(n - x, -p)))


# ============================================================================
# LIKELIHOOD FACTORIES
# ============================================================================
# Each factory closes over its parameters and returns fn(value) -> float,
# the form Stochastic nodes expect.

def dnorm(mu, tau):
    return lambda x: normal_logp(x, resolve(mu), resolve(tau))


def dunif(lower, upper):
    return lambda x: uniform_logp(x, resolve(lower), resolve(upper))


def dgamma(alpha, beta):
    return lambda x: gamma_logp(x, resolve(alpha), resolve(beta))


def dbinom(n, p):
    return lambda x: binomial_logp(x, resolve(n), resolve(p))
